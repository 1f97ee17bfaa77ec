# backend/models/supplier.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, func, Boolean, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base

# Manufacturer / vendor whose products are quoted
class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    short_name = Column(String(64), nullable=True)
    short_name_localized = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    status = Column(String(20), default="active", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    categories = relationship("SupplierCategory", back_populates="supplier", cascade="all, delete-orphan")
    overrides = relationship("SupplierParameterOverride", back_populates="supplier", cascade="all, delete-orphan")

# A category a supplier offers; proposal positions point here
class SupplierCategory(Base):
    __tablename__ = "supplier_categories"
    __table_args__ = (UniqueConstraint("supplier_id", "category_id", name="uq_supplier_category"),)

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    supplier = relationship("Supplier", back_populates="categories")
    category = relationship("Category")

# Supplier specific availability, bounds and extra values of a parameter
class SupplierParameterOverride(Base):
    __tablename__ = "supplier_parameter_overrides"
    __table_args__ = (UniqueConstraint("supplier_id", "parameter_id", name="uq_supplier_parameter"),)

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)
    parameter_id = Column(Integer, ForeignKey("parameters.id"), nullable=False, index=True)

    is_available = Column(Boolean, default=True, nullable=False)
    min_override = Column(Float, nullable=True)
    max_override = Column(Float, nullable=True)
    # List of extra value strings for SELECT / COLOR parameters
    custom_values = Column(JSON, nullable=True)

    supplier = relationship("Supplier", back_populates="overrides")
    parameter = relationship("Parameter")
