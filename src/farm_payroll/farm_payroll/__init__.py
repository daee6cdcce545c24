"""Farm Payroll package.

Labor payroll back end for smallholder coffee/pepper farms, organized by
feature modules (workers, attendance, payroll, advances, ...) with a thin
Flask controller layer over service/repository layers.
"""
