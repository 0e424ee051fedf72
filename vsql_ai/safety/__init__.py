"""Safety package.

This package contains small helpers that keep credentials out of logs and
diagnostic output. Credentials are passed through to exactly one request and
are never echoed back.
"""
