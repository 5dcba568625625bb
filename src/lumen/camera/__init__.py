"""Camera module.

Components:
    pinhole: Pinhole camera that turns the view direction per pixel
"""
