from .table import RangeTableConfig
from .range_check import RangeCheckConfig, RangeConstrained, RangeCheckCircuit
