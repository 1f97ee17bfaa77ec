# backend/models/category.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base

# A product family (interior doors, windows...) products are configured within
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    name_localized = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    parameters = relationship("CategoryParameter", back_populates="category", cascade="all, delete-orphan")

# Binding of a parameter to a category with per-category flags
class CategoryParameter(Base):
    __tablename__ = "category_parameters"
    __table_args__ = (UniqueConstraint("category_id", "parameter_id", name="uq_category_parameter"),)

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    parameter_id = Column(Integer, ForeignKey("parameters.id"), nullable=False, index=True)

    is_required = Column(Boolean, default=False, nullable=False)
    is_visible = Column(Boolean, default=True, nullable=False)
    order = Column(Integer, default=0, nullable=False)

    # Optional per-category label
    display_name = Column(String(255), nullable=True)
    display_name_localized = Column(String(255), nullable=True)

    category = relationship("Category", back_populates="parameters")
    parameter = relationship("Parameter")
