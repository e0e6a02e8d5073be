"""
Core modules for AI Cost Estimator.

This package contains the pure cost calculations: pricing, the model
catalog, shadow cost simulation, recommendations, and budget tracking.
"""
