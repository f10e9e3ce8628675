"""
Problem Model Builder for jsonlp

Turns a decoded JSON document into a ProblemModel. The document layout is:

    {
        "csr_constraint_matrix": {"offsets": [...], "indices": [...], "values": [...]},
        "objective_data": {"coefficients": [...], "offset": 0.0},
        "maximize": false,
        "constraint_bounds": {"lower_bounds": [...], "upper_bounds": [...]}
                          or {"bounds": [...], "types": ["L", "G", "E", ...]},
        "variable_bounds": {"lower_bounds": [...], "upper_bounds": [...]},
        "variable_types": ["C", "I", ...]
    }

Only ``csr_constraint_matrix`` and ``objective_data.coefficients`` are
mandatory. Bound entries may be numbers or the strings "inf", "infinity",
"-inf", "-infinity" and "ninf".
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import AllocationError, FormatError, MissingFieldError, ProblemIOError
from .parameters import Parameters
from .problem import Bounds, CSRMatrix, Objective, ProblemModel, Sense, VariableType
from .timing import phase_timer
from .values import parse_numeric_value

logger = logging.getLogger(__name__)


# Relational constraint types
LESS_EQUAL = 'L'
GREATER_EQUAL = 'G'
EQUAL = 'E'


@dataclass(frozen=True)
class ExplicitBoundsEncoding:
    """``lower_bounds`` / ``upper_bounds`` arrays, parsed pairwise by index"""
    lower: Sequence[Any]
    upper: Sequence[Any]


@dataclass(frozen=True)
class RelationalBoundsEncoding:
    """``bounds`` / ``types`` arrays, one relational operator per row"""
    bounds: Sequence[Any]
    types: Sequence[Any]


BoundsEncoding = Union[ExplicitBoundsEncoding, RelationalBoundsEncoding, None]


def _get_object(container: Dict[str, Any], key: str, path: str) -> Optional[Dict[str, Any]]:
    node = container.get(key)
    if node is None:
        return None
    if not isinstance(node, dict):
        raise FormatError(f"{path} must be a JSON object")
    return node


def _get_array(container: Dict[str, Any], key: str, path: str) -> Optional[List[Any]]:
    node = container.get(key)
    if node is None:
        return None
    if not isinstance(node, list):
        raise FormatError(f"{path} must be a JSON array")
    return node


def _require_array(container: Optional[Dict[str, Any]], key: str, path: str) -> List[Any]:
    if container is None:
        raise MissingFieldError(path)
    array = _get_array(container, key, path)
    if array is None:
        raise MissingFieldError(path)
    return array


def _int_array(nodes: List[Any], path: str) -> np.ndarray:
    try:
        # int() truncates toward zero like a C cast
        return np.array([int(v) for v in nodes], dtype=np.int64)
    except (TypeError, ValueError, OverflowError) as exc:
        raise FormatError(f"{path} must contain only numbers") from exc


def _float_array(nodes: List[Any], path: str) -> np.ndarray:
    try:
        return np.array([float(v) for v in nodes], dtype=np.float64)
    except (TypeError, ValueError, OverflowError) as exc:
        raise FormatError(f"{path} must contain only numbers") from exc


def build_matrix(doc: Dict[str, Any]) -> CSRMatrix:
    """
    Read the CSR constraint matrix.

    Parameters
    ----------
    doc : dict
        Decoded problem document

    Returns
    -------
    CSRMatrix
        Matrix with ``len(offsets) - 1`` rows and ``len(indices)`` nonzeros

    Raises
    ------
    MissingFieldError
        If ``csr_constraint_matrix`` or one of its arrays is absent
    FormatError
        If the arrays do not describe a valid CSR layout
    """
    csr = _get_object(doc, 'csr_constraint_matrix', 'csr_constraint_matrix')
    if csr is None:
        raise MissingFieldError('csr_constraint_matrix')
    offsets = _require_array(csr, 'offsets', 'csr_constraint_matrix.offsets')
    indices = _require_array(csr, 'indices', 'csr_constraint_matrix.indices')
    values = _require_array(csr, 'values', 'csr_constraint_matrix.values')

    if not offsets:
        raise FormatError("csr_constraint_matrix.offsets must have at least one entry")
    if len(values) != len(indices):
        raise FormatError(
            f"csr_constraint_matrix.values has {len(values)} entries, "
            f"expected {len(indices)} (one per index)"
        )

    row_offsets = _int_array(offsets, 'csr_constraint_matrix.offsets')
    column_indices = _int_array(indices, 'csr_constraint_matrix.indices')
    matrix_values = _float_array(values, 'csr_constraint_matrix.values')

    nnz = len(column_indices)
    if row_offsets[0] != 0:
        raise FormatError("csr_constraint_matrix.offsets must start at 0")
    if np.any(np.diff(row_offsets) < 0):
        raise FormatError("csr_constraint_matrix.offsets must be non-decreasing")
    if row_offsets[-1] != nnz:
        raise FormatError(
            f"csr_constraint_matrix.offsets must end at {nnz} (number of nonzeros), "
            f"got {row_offsets[-1]}"
        )

    return CSRMatrix(row_offsets, column_indices, matrix_values)


def build_objective(doc: Dict[str, Any]) -> Objective:
    """Read objective coefficients, offset and the top-level ``maximize`` flag"""
    objective_data = _get_object(doc, 'objective_data', 'objective_data')
    if objective_data is None:
        raise MissingFieldError('objective_data')
    coefficients = _require_array(objective_data, 'coefficients', 'objective_data.coefficients')

    offset_node = objective_data.get('offset')
    if offset_node is None:
        offset = 0.0
    elif isinstance(offset_node, (int, float)) and not isinstance(offset_node, bool):
        offset = float(offset_node)
    else:
        raise FormatError("objective_data.offset must be a number")
    logger.info("Objective offset: %g", offset)

    sense = Sense.MAXIMIZE if doc.get('maximize') is True else Sense.MINIMIZE
    return Objective(
        coefficients=_float_array(coefficients, 'objective_data.coefficients'),
        offset=offset,
        sense=sense,
    )


def resolve_constraint_bounds_encoding(doc: Dict[str, Any]) -> BoundsEncoding:
    """
    Decide which constraint-bound encoding the document uses.

    The explicit ``lower_bounds``/``upper_bounds`` pair wins; the relational
    ``bounds``/``types`` pair is only considered when the explicit pair is
    incomplete. Returns None when neither pair is complete.
    """
    container = _get_object(doc, 'constraint_bounds', 'constraint_bounds')
    if container is None:
        return None

    lower = _get_array(container, 'lower_bounds', 'constraint_bounds.lower_bounds')
    upper = _get_array(container, 'upper_bounds', 'constraint_bounds.upper_bounds')
    if lower is not None and upper is not None:
        return ExplicitBoundsEncoding(lower, upper)

    bounds = _get_array(container, 'bounds', 'constraint_bounds.bounds')
    types = _get_array(container, 'types', 'constraint_bounds.types')
    if bounds is not None and types is not None:
        return RelationalBoundsEncoding(bounds, types)

    logger.warning("constraint_bounds present but holds no complete encoding; ignoring it")
    return None


def _parse_pair(lower: Sequence[Any], upper: Sequence[Any], size: int,
                path: str, strict: bool) -> Bounds:
    for name, nodes in (('lower_bounds', lower), ('upper_bounds', upper)):
        if len(nodes) != size:
            raise FormatError(f"{path}.{name} has {len(nodes)} entries, expected {size}")
    return Bounds(
        lower=[parse_numeric_value(v, strict) for v in lower],
        upper=[parse_numeric_value(v, strict) for v in upper],
    )


def _parse_relational(encoding: RelationalBoundsEncoding, num_constraints: int,
                      strict: bool) -> Bounds:
    # Rows without a recognised type stay unconstrained
    lower = np.full(num_constraints, -np.inf)
    upper = np.full(num_constraints, np.inf)

    for i, (bound_node, row_type) in enumerate(zip(encoding.bounds, encoding.types)):
        if i >= num_constraints:
            break
        bound = parse_numeric_value(bound_node, strict)
        if row_type == LESS_EQUAL:
            upper[i] = bound
        elif row_type == GREATER_EQUAL:
            lower[i] = bound
        elif row_type == EQUAL:
            lower[i] = bound
            upper[i] = bound
        elif strict:
            raise FormatError(f"Unknown constraint type {row_type!r} at row {i}")
        else:
            logger.warning("Unknown constraint type %r at row %d skipped", row_type, i)

    return Bounds(lower, upper)


def build_constraint_bounds(doc: Dict[str, Any], num_constraints: int,
                            strict: bool = False) -> Optional[Bounds]:
    """
    Read constraint bounds AL/AU from either supported encoding.

    Returns None when the document declares no constraint bounds.
    """
    encoding = resolve_constraint_bounds_encoding(doc)
    if isinstance(encoding, ExplicitBoundsEncoding):
        return _parse_pair(encoding.lower, encoding.upper, num_constraints,
                           'constraint_bounds', strict)
    if isinstance(encoding, RelationalBoundsEncoding):
        return _parse_relational(encoding, num_constraints, strict)
    return None


def build_variable_bounds(doc: Dict[str, Any], num_variables: int,
                          strict: bool = False) -> Optional[Bounds]:
    """Read variable bounds l/u; only the explicit pair encoding is supported"""
    container = _get_object(doc, 'variable_bounds', 'variable_bounds')
    if container is None:
        return None
    lower = _get_array(container, 'lower_bounds', 'variable_bounds.lower_bounds')
    upper = _get_array(container, 'upper_bounds', 'variable_bounds.upper_bounds')
    if lower is None or upper is None:
        logger.warning("variable_bounds needs both lower_bounds and upper_bounds; ignoring it")
        return None
    return _parse_pair(lower, upper, num_variables, 'variable_bounds', strict)


def build_variable_types(doc: Dict[str, Any], num_variables: int) -> Tuple[VariableType, ...]:
    """"I" marks an integer variable; anything else, or no array at all, is continuous"""
    types = _get_array(doc, 'variable_types', 'variable_types')
    if types is None:
        return (VariableType.CONTINUOUS,) * num_variables
    if len(types) != num_variables:
        raise FormatError(
            f"variable_types has {len(types)} entries, expected {num_variables}"
        )
    return tuple(
        VariableType.INTEGER if t == VariableType.INTEGER.value else VariableType.CONTINUOUS
        for t in types
    )


def build_problem(doc: Dict[str, Any], parameters: Optional[Parameters] = None) -> ProblemModel:
    """
    Build a ProblemModel from a decoded JSON document.

    Parameters
    ----------
    doc : dict
        Decoded problem document
    parameters : Parameters, optional
        Controls strict parsing and phase timing. If None, defaults are used.

    Returns
    -------
    ProblemModel
        Immutable problem model

    Raises
    ------
    MissingFieldError
        If a mandatory container is absent
    FormatError
        If a field is structurally invalid
    AllocationError
        If memory runs out while building the arrays
    """
    if parameters is None:
        parameters = Parameters()
    if not isinstance(doc, dict):
        raise FormatError("Problem document must be a JSON object")
    timing = parameters.timing
    strict = parameters.strict_parsing

    try:
        with phase_timer("CSR_MATRIX_PARSE", timing):
            matrix = build_matrix(doc)
        with phase_timer("OBJECTIVE_PARSE", timing):
            objective = build_objective(doc)

        m = matrix.num_rows
        n = len(objective.coefficients)
        if matrix.nnz and (matrix.column_indices.min() < 0 or matrix.column_indices.max() >= n):
            raise FormatError(
                f"csr_constraint_matrix.indices must lie in [0, {n}) (number of variables)"
            )

        with phase_timer("CONSTRAINT_BOUNDS_PARSE", timing):
            constraint_bounds = build_constraint_bounds(doc, m, strict)
        with phase_timer("VARIABLE_BOUNDS_PARSE", timing):
            variable_bounds = build_variable_bounds(doc, n, strict)
        with phase_timer("VARIABLE_TYPES_PARSE", timing):
            variable_types = build_variable_types(doc, n)
    except MemoryError as exc:
        raise AllocationError("Memory allocation failed while building the problem") from exc

    return ProblemModel(
        matrix=matrix,
        objective=objective,
        constraint_bounds=constraint_bounds,
        variable_bounds=variable_bounds,
        variable_types=variable_types,
    )


def load_problem(filename: Union[str, Path], parameters: Optional[Parameters] = None) -> ProblemModel:
    """
    Read a JSON problem file and build its ProblemModel.

    The whole file is read into memory before parsing.

    Raises
    ------
    ProblemIOError
        If the file cannot be opened or read
    FormatError
        If the file is not a JSON object or a field is invalid
    """
    if parameters is None:
        parameters = Parameters()
    path = Path(filename)

    with phase_timer("FILE_READ", parameters.timing):
        try:
            text = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as exc:
            raise ProblemIOError(f"Cannot open file {path}: {exc}") from exc

    with phase_timer("JSON_PARSE_STRUCTURE", parameters.timing):
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FormatError(f"Failed to parse JSON: {exc}") from exc

    with phase_timer("PROBLEM_BUILD", parameters.timing):
        return build_problem(doc, parameters)
