"""Reference components built on the kernel.

Quick Start:
    >>> from linkcsg import Session, VariableStore
    >>> from linkcsg.components import ShieldBlock, BoltedFlange
    >>> session = Session(VariableStore({"BlockLength": 20.0, "BlockWidth": 30.0,
    ...                                  "BlockHeight": 30.0, "FlangeRadius": 4.0,
    ...                                  "FlangeOuterRadius": 10.0, "FlangeThick": 2.0,
    ...                                  "FlangeBoltRadius": 0.5}))
    >>> block = ShieldBlock("Block").create_all(session)
    >>> flange = BoltedFlange("Flange").create_all(session, "Block", 2)
"""

from .block import ShieldBlock
from .flange import BoltedFlange

__all__ = ["ShieldBlock", "BoltedFlange"]
