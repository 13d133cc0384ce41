# Import all models to ensure they are registered with SQLAlchemy
from .space_sites.properties import Property
from .space_sites.rooms import Room
from .leasing_tenants.tenants import Tenant
from .leasing_tenants.leases import Lease
from .leasing_tenants.documents import Document
from .financials.payments import Payment
from .financials.receipts import Receipt
