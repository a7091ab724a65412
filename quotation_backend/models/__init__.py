# quotation_backend/models/__init__.py
from quotation_backend.models.user_models import User
from quotation_backend.models.activity_models import UserActivity
from quotation_backend.models.product_models import Product
from quotation_backend.models.quotation_models import Quotation, QuotationItem, QuotationStatusHistory
from quotation_backend.models.sales_order_models import SalesOrder
