"""Bookings app package.

This app holds the booking aggregate and its rules: price quotes,
room availability per hotel and room type, the booking/payment status
machine and the cancellation refund policy. Status changes record domain
events that drive guest notifications once the transaction commits.
"""
