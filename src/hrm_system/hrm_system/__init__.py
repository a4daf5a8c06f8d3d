"""HRM System package.

Weekly KPI marking, monthly performance tiers, fines and bonuses, organized by
feature modules (kpi, payroll, funds, notifications, ...) with a thin Flask
JSON controller layer over service/repository layers.
"""
