"""Engine boundary contracts"""
