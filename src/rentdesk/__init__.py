"""rentdesk — account and rental catalogue backend.

Account registration and login, stateless bearer-token sessions,
profile management, and the product carousel that the storefront
renders on its home page.
"""

__version__ = "0.1.0"
