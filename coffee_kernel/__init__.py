"""
Coffee Kernel - liquidation core for the coffee-export back office.

Pure domain layer shared by the engines, configuration and services:
- Decimal-only money and weight values with lenient numeric coercion
- Immutable contract, lot, deduction, payment and report records
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
