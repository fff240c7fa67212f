"""CycleCast — menstrual cycle analysis and prediction.

Subpackages:
    engine/ — Cycle statistics, forecasting, phase classification, history edits
    models/ — Pydantic schemas for persisting period history
"""
