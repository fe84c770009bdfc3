"""Backend independent part of shader code generation.

A ``CodeGenerator`` validates a vertex/fragment document pair, orders the
nodes of each stage's graph, and leaves every target-specific decision (type
spellings, variable names, operator lowering, source layout) to a backend.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import NamedTuple, Sequence, cast

from loguru import logger

from shadergraph.document import (
    FragmentShader,
    InputAttribute,
    ShaderDocument,
    VertexShader,
)
from shadergraph.errors import ContractViolation, LinkError
from shadergraph.ir import (
    BuiltinUniform,
    ChannelProperty,
    Construct,
    CustomUniform,
    FragmentIn,
    FragmentOutColor,
    Operation,
    OperationResult,
    Swizzle,
    ValueRepresentation,
    VertexInput,
    VertexOut,
    VertexOutPointSize,
    VertexOutPosition,
)
from shadergraph.types import MaterialProperty, ShaderStage, ValueType
from shadergraph.values import ShaderValue

_VERTEX_ONLY = (
    VertexInput,
    VertexOutPosition,
    VertexOutPointSize,
    VertexOut,
    BuiltinUniform,
)
_FRAGMENT_ONLY = (FragmentIn, FragmentOutColor)
_OUTPUTS = (VertexOutPosition, VertexOutPointSize, VertexOut, FragmentOutColor)


class _Step(Enum):
    """Work items of the scheduling walk."""

    VISIT = auto()
    DECLARE = auto()
    ASSIGN = auto()
    ASSIGNED = auto()


class GeneratedSource(NamedTuple):
    """Source text of both stages of a program."""

    vertex_source: str
    fragment_source: str


@dataclass(frozen=True)
class Declaration:
    """Declare a temporary holding an operation or constructed value."""

    value: ShaderValue


@dataclass(frozen=True)
class Assignment:
    """Write a value to one of the stage's outputs."""

    target: ValueRepresentation
    value: ShaderValue


Statement = Declaration | Assignment


@dataclass
class StageScratch:
    """Mutable state used while rendering a single stage."""

    stage: ShaderStage | None = None
    temporaries: dict[object, str] = field(default_factory=dict)

    def declare(self, node: object, name: str) -> str:
        if node in self.temporaries:
            raise ContractViolation(f"Node declared twice as {name}")
        self.temporaries[node] = name
        return name


def graph_node(value: ShaderValue) -> object | None:
    """Return the node a value needs a temporary for, if any."""
    representation = value.representation
    if isinstance(representation, OperationResult):
        return representation.operation
    if isinstance(representation, Construct):
        return representation
    return None


class CodeGenerator(ABC):
    """Contract every shading language backend implements.

    Backends provide the four lowering hooks (``type_name``,
    ``variable_name``, ``render_operation``, ``generate_main``) and the source
    assembly of each stage. Configuration lives on the instance; everything
    produced while rendering a stage lives in ``StageScratch`` and is replaced
    by ``prepare_for_reuse``. An instance serves one ``generate`` call at a
    time.
    """

    def __init__(self) -> None:
        self._scratch = StageScratch()

    # --- Backend hooks ---

    @abstractmethod
    def type_name(self, value_type: ValueType) -> str:
        """Spell a logical type in the target language."""
        ...

    @abstractmethod
    def variable_name(self, representation: ValueRepresentation) -> str:
        """Text used to reference a value wherever it appears as an operand."""
        ...

    @abstractmethod
    def render_operation(self, operation: Operation) -> str:
        """Lower one operation to a target expression."""
        ...

    @abstractmethod
    def generate_main(self, document: ShaderDocument) -> str:
        """Statements computing and assigning every output of ``document``."""
        ...

    @abstractmethod
    def generate_vertex(
        self, vertex: VertexShader, attributes: Sequence[InputAttribute]
    ) -> str:
        """Assemble the complete vertex stage source."""
        ...

    @abstractmethod
    def generate_fragment(self, fragment: FragmentShader) -> str:
        """Assemble the complete fragment stage source."""
        ...

    def render_branch(self, operation: Operation) -> str:
        """Lower a ternary select. Backends without one must not be asked."""
        raise ContractViolation(
            f"{type(self).__name__} has no lowering for branch operations"
        )

    def temporary_name(self, index: int) -> str:
        return f"t{index}"

    # --- Entry point ---

    def generate(
        self,
        vertex: VertexShader,
        fragment: FragmentShader,
        attributes: Sequence[InputAttribute],
    ) -> GeneratedSource:
        """Generate the source of both stages.

        Raises:
            LinkError: If the two stages do not agree on their interface. No
                source is produced in that case.
        """
        self.validate(vertex, fragment, attributes)

        logger.debug("Generating vertex stage")
        self.prepare_for_reuse(ShaderStage.VERTEX)
        vertex_source = self.generate_vertex(vertex, attributes)

        logger.debug("Generating fragment stage")
        self.prepare_for_reuse(ShaderStage.FRAGMENT)
        fragment_source = self.generate_fragment(fragment)

        self.prepare_for_reuse()
        return GeneratedSource(vertex_source, fragment_source)

    def prepare_for_reuse(self, stage: ShaderStage | None = None) -> None:
        """Drop everything produced while rendering the previous stage."""
        self._scratch = StageScratch(stage)

    # --- Validation ---

    def validate(
        self,
        vertex: VertexShader,
        fragment: FragmentShader,
        attributes: Sequence[InputAttribute],
    ) -> None:
        """Check that the two stages and the attribute list fit together."""
        outputs = vertex.output.types()
        for name, expected in fragment.input.named_types().items():
            actual = outputs.get(name)
            if actual is None:
                raise LinkError(
                    name, expected, None, "vertex stage does not produce it"
                )
            if actual != expected:
                raise LinkError(name, expected, actual, "type mismatch")

        bound: set[VertexInput] = set()
        for attribute in attributes:
            representation = attribute.representation
            if representation in bound:
                raise LinkError(
                    _attribute_label(representation),
                    attribute.value_type,
                    None,
                    "attribute bound more than once",
                )
            bound.add(representation)

        for representation in self._referenced(vertex):
            if isinstance(representation, VertexInput) and representation not in bound:
                raise LinkError(
                    _attribute_label(representation),
                    representation.slot.value_type,
                    None,
                    "attribute is read but not bound",
                )

    def _referenced(self, document: ShaderDocument) -> list[ValueRepresentation]:
        """Every representation reachable from the document's outputs."""
        found: list[ValueRepresentation] = []
        seen: set[int] = set()
        stack = [value for _, value in reversed(document.assignments())]
        while stack:
            value = stack.pop()
            if id(value) in seen:
                continue
            seen.add(id(value))
            representation = value.representation
            found.append(representation)
            match representation:
                case OperationResult(operation):
                    stack.extend(reversed(operation.dependencies()))
                case Construct(components=components):
                    stack.extend(reversed(components))
                case Swizzle(parent=parent):
                    stack.append(parent)
        return found

    # --- Scheduling ---

    def schedule(self, document: ShaderDocument) -> list[Statement]:
        """Order the statements of a stage body.

        Operation and constructed nodes come out in dependency order, each
        exactly once. An output that another expression reads back is assigned
        before that expression is declared.
        """
        targets = dict(document.assignments())
        uniforms = {value.representation for value in document.sorted_custom_uniforms()}
        statements: list[Statement] = []
        declared: set[object] = set()
        assigned: set[ValueRepresentation] = set()
        pending: set[ValueRepresentation] = set()

        # Work items are popped last-in first-out; a node's "declare" item sits
        # below its dependencies so it is emitted after all of them
        stack: list[tuple[_Step, object]] = [
            (_Step.ASSIGN, target) for target in reversed(list(targets))
        ]
        while stack:
            step, item = stack.pop()
            match step:
                case _Step.VISIT:
                    value = cast(ShaderValue, item)
                    representation = value.representation
                    self._check_stage(representation, document.stage, uniforms)
                    match representation:
                        case Swizzle(parent=parent):
                            stack.append((_Step.VISIT, parent))
                            continue
                        case OperationResult(operation):
                            dependencies = operation.dependencies()
                        case Construct(components=components):
                            dependencies = components
                        case _:
                            if isinstance(representation, _OUTPUTS):
                                if representation not in targets:
                                    raise ContractViolation(
                                        f"{representation} is read but never written"
                                    )
                                stack.append((_Step.ASSIGN, representation))
                            continue

                    node = graph_node(value)
                    if node in declared:
                        continue
                    declared.add(node)
                    stack.append((_Step.DECLARE, value))
                    stack.extend(
                        (_Step.VISIT, dependency)
                        for dependency in reversed(dependencies)
                    )

                case _Step.DECLARE:
                    statements.append(Declaration(cast(ShaderValue, item)))

                case _Step.ASSIGN:
                    if item in assigned:
                        continue
                    if item in pending:
                        raise ContractViolation(f"{item} depends on itself")
                    pending.add(item)
                    stack.append((_Step.ASSIGNED, item))
                    stack.append((_Step.VISIT, targets[item]))

                case _Step.ASSIGNED:
                    target = cast(ValueRepresentation, item)
                    pending.discard(target)
                    assigned.add(target)
                    statements.append(Assignment(target, targets[target]))

        logger.debug(
            f"Scheduled {len(declared)} nodes and {len(assigned)} outputs "
            f"for {document.stage.name.lower()} stage"
        )
        return statements

    def _check_stage(
        self,
        representation: ValueRepresentation,
        stage: ShaderStage,
        uniforms: set[ValueRepresentation],
    ) -> None:
        if stage == ShaderStage.VERTEX and isinstance(representation, _FRAGMENT_ONLY):
            raise ContractViolation(f"{representation} is not available in vertex stage")
        if stage == ShaderStage.FRAGMENT and isinstance(representation, _VERTEX_ONLY):
            raise ContractViolation(
                f"{representation} is not available in fragment stage"
            )
        if isinstance(representation, CustomUniform) and representation not in uniforms:
            raise ContractViolation(
                f"Uniform u{representation.index} belongs to another document"
            )
        if (
            stage == ShaderStage.VERTEX
            and isinstance(representation, ChannelProperty)
            and representation.prop == MaterialProperty.TEXTURE
        ):
            raise ContractViolation("Textures can only be sampled in fragment stage")

    # --- Helpers for backends ---

    def reference(self, value: ShaderValue) -> str:
        """Text referring to ``value``, using its temporary when it has one."""
        node = graph_node(value)
        if node is None:
            return self.variable_name(value.representation)
        name = self._scratch.temporaries.get(node)
        if name is None:
            raise ContractViolation(f"{value!r} is used before it is declared")
        return name

    def declare_temporary(self, value: ShaderValue) -> str:
        """Allocate the temporary that will hold ``value``."""
        name = self.temporary_name(len(self._scratch.temporaries))
        return self._scratch.declare(graph_node(value), name)


def _attribute_label(representation: VertexInput) -> str:
    return f"{representation.slot.name.lower()}[{representation.geometry_index}]"
