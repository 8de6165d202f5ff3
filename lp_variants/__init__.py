"""Landing-page variant generation and recommendation service"""

__version__ = "0.1.0"
