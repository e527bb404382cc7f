"""
Polynomial expressions over circuit cells.

An `Expression` is a tree of operation nodes. The leaves are constants,
selectors and column queries at a relative row (`Rotation`). The same tree is
evaluated over several domains by passing one callback per node kind to
`Expression.evaluate`: the mock prover plugs in row values, the prover plugs
in polynomials and the verifier plugs in claimed evaluations.
"""

from __future__ import annotations


class Rotation(int):
    """Row offset of a query relative to the current row"""

    @classmethod
    def cur(cls):
        return cls(0)

    @classmethod
    def next(cls):
        return cls(1)

    @classmethod
    def prev(cls):
        return cls(-1)

    def __repr__(self):
        return f"Rotation({int(self)})"


class Expression:

    def __init__(self):
        self.op = ""

    def __add__(self, other):
        return Sum(self, _to_expression(other))

    def __radd__(self, other):
        return Sum(_to_expression(other), self)

    def __sub__(self, other):
        return Sum(self, Negated(_to_expression(other)))

    def __rsub__(self, other):
        return Sum(_to_expression(other), Negated(self))

    def __mul__(self, other):
        if isinstance(other, int):
            return Scaled(self, other)
        return Product(self, _to_expression(other))

    def __rmul__(self, other):
        if isinstance(other, int):
            return Scaled(self, other)
        return Product(_to_expression(other), self)

    def __neg__(self):
        return Negated(self)

    def __pow__(self, other):
        raise SyntaxError(
            "Integer power is not supported. Consider converting power to multiplication."
        )

    def __repr__(self):
        return self.__str__()

    def degree(self) -> int:
        """Degree of the expression as a polynomial in the queried cells"""
        return self.evaluate(
            constant=lambda _: 0,
            selector_column=lambda _: 1,
            fixed_column=lambda _: 1,
            advice_column=lambda _: 1,
            instance_column=lambda _: 1,
            negated=lambda d: d,
            sum_=max,
            product=lambda a, b: a + b,
            scaled=lambda d, _: d,
        )

    def evaluate(
        self,
        constant,
        selector_column,
        fixed_column,
        advice_column,
        instance_column,
        negated,
        sum_,
        product,
        scaled,
    ):
        """
        Fold the expression tree bottom-up.

        Leaf callbacks receive the leaf node (the constant value for
        constants), inner callbacks receive the already folded children.
        """

        def fold(node):
            if node.op == "CONST":
                return constant(node.value)
            if node.op == "SELECTOR":
                return selector_column(node.selector)
            if node.op == "FIXED":
                return fixed_column(node)
            if node.op == "ADVICE":
                return advice_column(node)
            if node.op == "INSTANCE":
                return instance_column(node)
            if node.op == "NEG":
                return negated(fold(node.inner))
            if node.op == "ADD":
                return sum_(fold(node.left), fold(node.right))
            if node.op == "MUL":
                return product(fold(node.left), fold(node.right))
            if node.op == "SCALE":
                return scaled(fold(node.inner), node.factor)
            raise ValueError(f"Unknown expression node {node.op}")

        return fold(self)

    def queried_selectors(self) -> list:
        selectors = []
        self.evaluate(
            constant=lambda _: None,
            selector_column=selectors.append,
            fixed_column=lambda _: None,
            advice_column=lambda _: None,
            instance_column=lambda _: None,
            negated=lambda _: None,
            sum_=lambda a, b: None,
            product=lambda a, b: None,
            scaled=lambda a, b: None,
        )
        return selectors

    def queried_cells(self) -> list:
        """Column queries of the expression, in order of appearance"""
        cells = []

        def collect(node):
            if node not in cells:
                cells.append(node)

        self.evaluate(
            constant=lambda _: None,
            selector_column=lambda _: None,
            fixed_column=collect,
            advice_column=collect,
            instance_column=collect,
            negated=lambda _: None,
            sum_=lambda a, b: None,
            product=lambda a, b: None,
            scaled=lambda a, b: None,
        )
        return cells

    def contains_simple_selector(self) -> bool:
        return any(s.simple for s in self.queried_selectors())

    def replace_selectors(self, mapping: dict) -> Expression:
        """Rebuild the expression with every selector replaced by `mapping[selector.index]`"""
        return self.evaluate(
            constant=Constant,
            selector_column=lambda s: mapping[s.index],
            fixed_column=lambda q: q,
            advice_column=lambda q: q,
            instance_column=lambda q: q,
            negated=Negated,
            sum_=Sum,
            product=Product,
            scaled=Scaled,
        )


def _to_expression(value) -> Expression:
    if isinstance(value, Expression):
        return value
    if isinstance(value, int):
        return Constant(value)
    raise TypeError(f"Cannot use {type(value)} in an expression")


class Constant(Expression):
    def __init__(self, value: int):
        super().__init__()
        self.op = "CONST"
        self.value = value

    def __str__(self):
        return str(self.value)


class SelectorExpression(Expression):
    def __init__(self, selector):
        super().__init__()
        self.op = "SELECTOR"
        self.selector = selector

    def __str__(self):
        return f"S{self.selector.index}"


class Query(Expression):
    """Query of `column` at `rotation` relative to the current row"""

    def __init__(self, column, rotation: int):
        super().__init__()
        self.column = column
        self.rotation = Rotation(rotation)

    def __eq__(self, other):
        if not isinstance(other, Query):
            return NotImplemented
        return self.column == other.column and self.rotation == other.rotation

    def __hash__(self):
        return hash((self.column, int(self.rotation)))

    def __str__(self):
        return f"{self.column}@{int(self.rotation)}"


class FixedQuery(Query):
    def __init__(self, column, rotation: int):
        super().__init__(column, rotation)
        self.op = "FIXED"


class AdviceQuery(Query):
    def __init__(self, column, rotation: int):
        super().__init__(column, rotation)
        self.op = "ADVICE"


class InstanceQuery(Query):
    def __init__(self, column, rotation: int):
        super().__init__(column, rotation)
        self.op = "INSTANCE"


class Negated(Expression):
    def __init__(self, inner: Expression):
        super().__init__()
        self.op = "NEG"
        self.inner = inner

    def __str__(self):
        return f"-{self.inner}"


class Sum(Expression):
    def __init__(self, left: Expression, right: Expression):
        super().__init__()
        self.op = "ADD"
        self.left = left
        self.right = right

    def __str__(self):
        if self.right.op == "NEG":
            return f"({self.left} - {self.right.inner})"
        return f"({self.left} + {self.right})"


class Product(Expression):
    def __init__(self, left: Expression, right: Expression):
        super().__init__()
        self.op = "MUL"
        self.left = left
        self.right = right

    def __str__(self):
        return f"{self.left}*{self.right}"


class Scaled(Expression):
    def __init__(self, inner: Expression, factor: int):
        super().__init__()
        self.op = "SCALE"
        self.inner = inner
        self.factor = factor

    def __str__(self):
        return f"{self.inner}*{self.factor}"
