from ..arithmetization.circuit import Layouter
from ..arithmetization.constraint_system import ConstraintSystem, TableColumn
from ..errors import ConfigurationError
from ..value import Value


class RangeTableConfig:
    """
    Lookup table holding every integer of `[0, lookup_range)`

        table_value
       -------------
            0
            1
           ...
        RANGE - 1
    """

    def __init__(self, value: TableColumn, lookup_range: int):
        self.value = value
        self.lookup_range = lookup_range

    @classmethod
    def configure(cls, meta: ConstraintSystem, lookup_range: int):
        if lookup_range <= 0:
            raise ConfigurationError(f"lookup range must be positive, got {lookup_range}")

        value = meta.lookup_table_column()
        return cls(value, lookup_range)

    def load(self, layouter: Layouter):

        def fill(table):
            for offset in range(self.lookup_range):
                table.assign_cell("value", self.value, offset, Value.known(offset))

        layouter.assign_table("load range-check table", fill)
