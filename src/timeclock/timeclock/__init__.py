"""Timeclock package.

Attendance capture and payroll calculation engine, organized by feature
modules (ingestion, attendance, schedules, reconciliation, payroll, ...)
with a thin Flask controller layer over service/repository layers.
"""
