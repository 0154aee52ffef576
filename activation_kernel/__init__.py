"""
Activation Kernel - Module Dependency & Activation Resolver

Decides which optional feature modules a tenant may have active:
- Dependency closure over an immutable, acyclic module catalog
- Consistency validation of candidate module sets
- Cascade planning for disables, with a mandatory confirmation step
- Self-consistent bundle presets applied as full replacements

The kernel holds no tenant state and performs no I/O.
"""

__version__ = "0.1.0"
