"""Calldata post-processing: affiliate attribution, pay-taker repair, reverts."""
