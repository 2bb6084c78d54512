"""Seed rows for lookup tables shared by the catalog endpoints."""

from __future__ import annotations

SERVICE_TYPES = [
    {
        "name": "Maintenance",
        "description": "Scheduled servicing: oil, filters, fluids and inspections.",
    },
    {
        "name": "Repair",
        "description": "Mechanical repairs for engine, transmission and drivetrain.",
    },
    {"name": "Brakes", "description": "Pads, discs, callipers and brake fluid."},
    {"name": "Tyres", "description": "Fitting, balancing, rotation and alignment."},
    {"name": "Electrical", "description": "Batteries, starters, alternators and wiring."},
    {"name": "Diagnostics", "description": "OBD scans and fault finding."},
    {"name": "Body & Paint", "description": "Panel beating, paint and detailing."},
    {"name": "Air Conditioning", "description": "A/C regas, leak tests and compressor work."},
]
