"""pyreqwest-cookiejar - Browser-like cookie jar for pyreqwest and RPC clients.

Remembers cookies set by `Set-Cookie` / `Set-Cookie2` response headers and sends them back on later calls
to the same origin.

Features:
- Thread-safe in-memory jar keyed by (domain, path, name)
- Original-server-only policy: no cookie sharing between a domain and its subdomains
- Directory-aware path matching
- Secure-flag enforcement for plaintext origins
- Max-Age and Expires handling with lazy eviction
- Plugs into pyreqwest clients as async/sync middleware
- Transport neutral interceptor for any client exposing header maps
"""
