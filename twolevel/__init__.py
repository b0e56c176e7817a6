# twolevel Package
"""
Two-Level Adaptive Branch Prediction

Bit-level models of the registers, saturating counters and pattern
history tables behind the GAg/GAp/GAs/PAg/PAp/PAs/SAg/SAp/SAs
branch predictor family.
"""

__version__ = "1.0.0"
