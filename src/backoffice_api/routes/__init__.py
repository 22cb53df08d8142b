"""API routes package.

Routers are organized by resource:

- health: Health check endpoints
- auth: Registration, login, own profile and user administration
- bookings: Bookings, their status and statistics
- booking_payments: Payments taken against bookings
- orders: Shop orders and order statistics
- products: Product catalogue
- contacts: Contact form submissions
- subscriptions: Newsletter subscriptions
- stats: Admin statistics
- webhooks: Payment provider events

All routers are registered in main.py with /api prefix.
"""

from backoffice_api.routes.auth import router as auth_router
from backoffice_api.routes.booking_payments import router as booking_payments_router
from backoffice_api.routes.bookings import router as bookings_router
from backoffice_api.routes.contacts import router as contacts_router
from backoffice_api.routes.health import router as health_router
from backoffice_api.routes.orders import router as orders_router
from backoffice_api.routes.products import router as products_router
from backoffice_api.routes.stats import router as stats_router
from backoffice_api.routes.subscriptions import router as subscriptions_router
from backoffice_api.routes.webhooks import router as webhooks_router

__all__ = [
    "auth_router",
    "booking_payments_router",
    "bookings_router",
    "contacts_router",
    "health_router",
    "orders_router",
    "products_router",
    "stats_router",
    "subscriptions_router",
    "webhooks_router",
]
