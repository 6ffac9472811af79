"""HR schedule-integrity package.

Organized by feature modules (clock, holidays, schedules, requests, ...)
with a thin Flask layer on top of service/repository layers.
"""
