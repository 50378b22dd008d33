from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

ORDER_STATUSES = ["new", "assigned", "in_progress", "completed", "closed"]
ORDER_PRIORITIES = ["low", "medium", "high"]
EMPLOYEE_SPECIFICATIONS = ["technician", "supervisor", "manager"]
EMPLOYEE_STATUSES = ["active", "inactive"]
RECURRENCE_TYPES = ["daily", "weekly", "monthly"]
ATTACHMENT_TYPES = ["image", "document", "audio"]
NOTIFICATION_TYPES = ["new_order", "assigned", "completed", "overdue"]


class User(Base):
    """Back-office staff account used to sign in to the admin UI"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="staff", nullable=False)  # admin, staff
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=True, index=True)
    phone = Column(String(20), nullable=True)
    company = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    tin_number = Column(String(50), nullable=True)  # Tax identification number
    created_at = Column(DateTime, server_default=func.now())

    service_orders = relationship("ServiceOrder", back_populates="customer")


class TechnicianServiceType(Base):
    """Skill mapping: which service types an employee is qualified to perform"""

    __tablename__ = "technician_service_types"

    employee_id = Column(
        Integer, ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True
    )
    service_type_id = Column(
        Integer, ForeignKey("service_types.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee", back_populates="skills")
    service_type = relationship("ServiceType", back_populates="technicians")


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=True)
    specification = Column(
        String(20), default="technician", nullable=False
    )  # technician, supervisor, manager
    status = Column(String(20), default="active", nullable=False)  # active, inactive
    created_at = Column(DateTime, server_default=func.now())

    skills = relationship(
        "TechnicianServiceType", back_populates="employee", cascade="all, delete-orphan"
    )
    # past assignments outlive the employee with employee_id set to NULL
    assignments = relationship("ServiceOrderAssignment", back_populates="employee")


class ServiceType(Base):
    __tablename__ = "service_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(100), unique=True, index=True, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    technicians = relationship(
        "TechnicianServiceType", back_populates="service_type", cascade="all, delete-orphan"
    )
    service_orders = relationship("ServiceOrder", back_populates="service_type")


class ServiceOrder(Base):
    __tablename__ = "service_orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    service_type_id = Column(Integer, ForeignKey("service_types.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    priority = Column(String(10), nullable=False)  # low, medium, high

    # Status workflow: new → assigned → in_progress → completed → closed
    status = Column(String(20), default="new", nullable=False, index=True)
    lead_employee_id = Column(
        Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True
    )
    due_date = Column(DateTime, nullable=True, index=True)

    # Lifecycle timestamps, stamped the first time the order enters each status
    assigned_at = Column(DateTime, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    closed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="service_orders")
    service_type = relationship("ServiceType", back_populates="service_orders")
    lead_employee = relationship("Employee", foreign_keys=[lead_employee_id])
    items = relationship(
        "ServiceOrderItem", back_populates="order", cascade="all, delete-orphan"
    )
    assignments = relationship(
        "ServiceOrderAssignment",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="ServiceOrderAssignment.assigned_at",
    )
    status_history = relationship(
        "ServiceOrderStatusHistory",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="ServiceOrderStatusHistory.id",
    )
    recurring_schedules = relationship(
        "RecurringOrder", back_populates="order", cascade="all, delete-orphan"
    )
    attachments = relationship(
        "Attachment", back_populates="order", cascade="all, delete-orphan"
    )


class ServiceOrderItem(Base):
    __tablename__ = "service_order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer, ForeignKey("service_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_type_id = Column(Integer, ForeignKey("service_types.id"), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("ServiceOrder", back_populates="items")
    service_type = relationship("ServiceType")


class ServiceOrderAssignment(Base):
    __tablename__ = "service_order_assignments"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer, ForeignKey("service_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    employee_id = Column(
        Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True
    )
    role_in_order = Column(String(50), nullable=True)
    assigned_at = Column(DateTime, server_default=func.now())
    unassigned_at = Column(DateTime, nullable=True)  # NULL while the assignment is active
    notes = Column(Text, nullable=True)

    order = relationship("ServiceOrder", back_populates="assignments")
    employee = relationship("Employee", back_populates="assignments")


class ServiceOrderStatusHistory(Base):
    __tablename__ = "service_order_status_history"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer, ForeignKey("service_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    old_status = Column(String(20), nullable=True)
    new_status = Column(String(20), nullable=False)
    changed_at = Column(DateTime, server_default=func.now())
    changed_by = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    comment = Column(Text, nullable=True)

    order = relationship("ServiceOrder", back_populates="status_history")
    employee = relationship("Employee")


class RecurringOrder(Base):
    """Schedule that periodically copies a template service order"""

    __tablename__ = "recurring_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer, ForeignKey("service_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    recurrence_type = Column(String(10), nullable=False)  # daily, weekly, monthly
    start_date = Column(DateTime, nullable=True)  # anchor that monthly steps are counted from
    next_due_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_generated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    order = relationship("ServiceOrder", back_populates="recurring_schedules")


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer, ForeignKey("service_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_path = Column(String(500), nullable=False)  # Storage key (local path or R2 key)
    original_filename = Column(String(255), nullable=True)
    content_type = Column(String(100), nullable=True)
    size_bytes = Column(Integer, nullable=True)
    file_type = Column(String(20), default="document", nullable=False)  # image, document, audio
    created_at = Column(DateTime, server_default=func.now())

    order = relationship("ServiceOrder", back_populates="attachments")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    service_order_id = Column(
        Integer, ForeignKey("service_orders.id", ondelete="SET NULL"), nullable=True, index=True
    )
    employee_id = Column(
        Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True
    )  # Recipient, NULL for back-office wide notifications
    type = Column(String(20), nullable=False)  # new_order, assigned, completed, overdue
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now(), index=True)
