"""
Orders app: products, orders and the order history written on payment.

The Order Lifecycle Manager (orders.services) owns the pending -> active ->
delivered transitions. Payment orchestration lives in the payments app.
"""
