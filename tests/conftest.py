"""Shared fixtures for the CRM panel test-suite."""

from __future__ import annotations

from decimal import Decimal

import pytest

from crm_panel.app import ControlPanel
from crm_panel.config import DatabaseConfig, Settings
from crm_panel.models import Customer, Staff
from crm_panel.storage import MemoryStore


@pytest.fixture
def store() -> MemoryStore:
    """Provide an empty in-memory store per test."""
    return MemoryStore()


@pytest.fixture
def settings() -> Settings:
    """Settings with sample data disabled so every collection starts empty."""
    return Settings(
        seed_sample_data=False,
        database=DatabaseConfig(host="localhost", port=5432, user="crm", password="crm", dbname="crm_panel"),
    )


@pytest.fixture
def panel(store: MemoryStore, settings: Settings) -> ControlPanel:
    """Provide an unseeded control panel over the shared store."""
    return ControlPanel(store=store, settings=settings)


@pytest.fixture
def seeded_panel() -> ControlPanel:
    """Provide a control panel populated with the demo records."""
    return ControlPanel(
        store=MemoryStore(),
        settings=Settings(
            database=DatabaseConfig(host="localhost", port=5432, user="crm", password="crm", dbname="crm_panel"),
        ),
    )


@pytest.fixture
def customer(panel: ControlPanel) -> Customer:
    """Seed a business customer."""
    return panel.customers.create_customer(
        Customer(
            first_name="Ada",
            last_name="Lovelace",
            email="ada@analytical.example",
            phone="+1 (555) 010-0001",
            company="Analytical Engines",
            type="Business",
        )
    )


@pytest.fixture
def staff_member(panel: ControlPanel) -> Staff:
    """Seed an active staff member."""
    return panel.staff.create_staff(
        Staff(
            first_name="Grace",
            last_name="Hopper",
            email="grace@company.example",
            job_title="Engineering Lead",
            department="Engineering",
            salary=Decimal("120000"),
        )
    )
