"""
DentalRef v1.0 - Clinical Reference Scoring Engine for Dentistry

A library that ranks dental materials and relates dental procedures:
- Material recommendation against a clinical criteria profile
- Side-by-side material comparison matrices
- Procedure relevance linking (related, follow-up, preventive)
"""

__version__ = "1.0.0"
__author__ = "DentalRef Team"
