"""Render module for simulation output display."""

from render.renderers import (
    BaseRenderer,
    CustomRenderer,
    ProjectionRenderer,
    SummaryRenderer,
    GuaranteedIncomeRenderer,
    StrategiesRenderer,
    SensitivityRenderer,
    BreakevenRenderer,
    WidowRenderer,
    PROJECTION_FIELDS,
    RENDERER_REGISTRY,
)

__all__ = [
    'BaseRenderer',
    'CustomRenderer',
    'ProjectionRenderer',
    'SummaryRenderer',
    'GuaranteedIncomeRenderer',
    'StrategiesRenderer',
    'SensitivityRenderer',
    'BreakevenRenderer',
    'WidowRenderer',
    'PROJECTION_FIELDS',
    'RENDERER_REGISTRY',
]
