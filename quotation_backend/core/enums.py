# quotation_backend/core/enums.py
from enum import Enum


class QuotationStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONVERTED = "converted"
    EXPIRED = "expired"

    def __str__(self):
        return self.value


class QuotationAction(str, Enum):
    EDIT = "edit"
    SEND = "send"
    APPROVE = "approve"
    REJECT = "reject"
    CONVERT = "convert"
    DELETE = "delete"
    DUPLICATE = "duplicate"

    def __str__(self):
        return self.value


class UserRole(str, Enum):
    ADMIN = "admin"
    SALES = "sales"

    def __str__(self):
        return self.value
