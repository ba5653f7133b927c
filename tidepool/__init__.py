"""
Tidepool presence core

Privacy-preserving presence reporting and interest-weighted heat rendering.

Structure:
- core/ - tiling, presence gating/reporting, interest vectors, heat compositing
- common/ - configuration loading
- utils/ - constants, environment parsing, error types, logging helpers
"""

__version__ = "0.4.0"
