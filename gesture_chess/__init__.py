"""
Gesture Chess
Move chess pieces by pinching in front of a webcam
"""

__version__ = "0.1.0"
