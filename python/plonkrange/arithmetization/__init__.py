from .expression import Expression, Rotation, Constant
from .constraint_system import (
    Advice,
    Fixed,
    Instance,
    Column,
    ColumnType,
    TableColumn,
    Selector,
    VirtualCells,
    Constraints,
    Gate,
    Lookup,
    ConstraintSystem,
)
from .circuit import (
    Cell,
    AssignedCell,
    Assignment,
    Region,
    Table,
    Layouter,
    SingleChipLayouter,
    NamespacedLayouter,
    SimpleFloorPlanner,
    Circuit,
)
