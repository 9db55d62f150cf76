"""State layer.

The race state store and the single upstream connection state. Both are
owned by one relay session; subscribers only ever see serialized copies.
"""
