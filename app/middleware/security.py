"""
Security middleware for the movie tracker API
Adds security headers to every response
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import os


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers (XSS, CSP, HSTS, etc.)"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # XSS Protection & Clickjacking
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"

        # HSTS only makes sense behind HTTPS
        if os.getenv("ENVIRONMENT") == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # Content Security Policy - loosened for Swagger UI, TMDB posters and YouTube embeds
        csp_directives = [
            "default-src 'self'",
            "script-src 'self' 'unsafe-inline' https://www.youtube.com https://cdn.jsdelivr.net",
            "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
            "img-src 'self' https://image.tmdb.org https://i.ytimg.com https://fastapi.tiangolo.com data:",
            "frame-src https://www.youtube.com",
        ]
        response.headers["Content-Security-Policy"] = "; ".join(csp_directives)

        # Additional headers
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response
