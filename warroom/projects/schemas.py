"""Pydantic schemas for War Room projects and BOQ items."""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from warroom.status_engine.item_model import ApprovalStatus, BOQCategory, BOQCoverage


class ItemCreate(BaseModel):
    id: Optional[str] = None
    category: BOQCategory
    area: str = ""
    description: str = Field(..., min_length=1)
    boq_included: bool = False
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    purchased: bool = False
    received: bool = False
    installed: bool = False
    delivery_date: Optional[date] = None
    item_code: Optional[str] = None
    supplier: Optional[str] = None
    purchase_order_ref: Optional[str] = None
    quantity: Optional[float] = Field(None, ge=0)
    unit_cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    production_due_date: Optional[date] = None
    received_date: Optional[date] = None
    site_movement_date: Optional[date] = None
    installation_start_date: Optional[date] = None
    installed_date: Optional[date] = None


class ItemUpdate(BaseModel):
    """Partial item update; only fields sent are applied."""
    category: Optional[BOQCategory] = None
    area: Optional[str] = None
    description: Optional[str] = Field(None, min_length=1)
    boq_included: Optional[bool] = None
    approval_status: Optional[ApprovalStatus] = None
    purchased: Optional[bool] = None
    received: Optional[bool] = None
    installed: Optional[bool] = None
    delivery_date: Optional[date] = None
    item_code: Optional[str] = None
    supplier: Optional[str] = None
    purchase_order_ref: Optional[str] = None
    quantity: Optional[float] = Field(None, ge=0)
    unit_cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    production_due_date: Optional[date] = None
    received_date: Optional[date] = None
    site_movement_date: Optional[date] = None
    installation_start_date: Optional[date] = None
    installed_date: Optional[date] = None


class BulkItemsCreate(BaseModel):
    items: List[ItemCreate] = Field(..., min_length=1)


class ProjectCreate(BaseModel):
    id: Optional[str] = None
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    client: str = ""
    location: Optional[str] = None
    project_manager: Optional[str] = None
    start_date: Optional[date] = None
    target_completion_date: Optional[date] = None
    boq_master_ref: str = ""
    boq_version: str = ""
    coverage_overrides: Dict[BOQCategory, BOQCoverage] = Field(default_factory=dict)
    items: List[ItemCreate] = Field(default_factory=list)


class ProjectUpdate(BaseModel):
    """Partial project update; items are managed through the item endpoints."""
    code: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    client: Optional[str] = None
    location: Optional[str] = None
    project_manager: Optional[str] = None
    start_date: Optional[date] = None
    target_completion_date: Optional[date] = None
    boq_master_ref: Optional[str] = None
    boq_version: Optional[str] = None
    coverage_overrides: Optional[Dict[BOQCategory, BOQCoverage]] = None
