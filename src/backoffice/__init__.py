"""Back-office domain package.

Holds the domain models, persistence wrapper and services shared by the
REST API (``backoffice_api``) and the operational scripts.
"""

__version__ = "0.1.0"
