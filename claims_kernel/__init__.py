"""
Claims Kernel

Shared foundation for the compensation calculation engine:
- Typed exceptions with machine-readable codes
- Structured JSON logging with request-scoped context
- Claim, worker, dependant and reference-data value objects
- Record-store protocol with in-memory and SQLAlchemy implementations
- Reference data loading and claim context resolution
"""

__version__ = "0.1.0"
