"""
SQLAlchemy models for the dealership schema: people, inventory, sales,
service and the audit trail.
"""

# Import all models to make them available when importing the package
from dealership.models.user import User
from dealership.models.customer import Customer
from dealership.models.vehicle import Vehicle, VehicleStatus
from dealership.models.lead import Lead, LeadStatus
from dealership.models.sale import Sale, SaleStatus
from dealership.models.service import (
    AppointmentStatus,
    ItemType,
    RepairOrder,
    RepairOrderItem,
    RepairOrderStatus,
    ServiceAppointment,
    ServiceHistory,
)
from dealership.models.part import Part
from dealership.models.communication import Communication, CommunicationStatus, CommunicationType
from dealership.models.ledger import LedgerTransaction
from dealership.models.audit import AuditAction, AuditLogEntry

# Export all models
__all__ = [
    "User",
    "Customer",
    "Vehicle",
    "VehicleStatus",
    "Lead",
    "LeadStatus",
    "Sale",
    "SaleStatus",
    "ServiceAppointment",
    "AppointmentStatus",
    "RepairOrder",
    "RepairOrderStatus",
    "RepairOrderItem",
    "ItemType",
    "ServiceHistory",
    "Part",
    "Communication",
    "CommunicationStatus",
    "CommunicationType",
    "LedgerTransaction",
    "AuditLogEntry",
    "AuditAction",
]
