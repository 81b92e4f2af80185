"""Hierarchical (And/Or) representations and the operators recursing over them."""

from .matching import HierarchicalType, ReductionKind, ReductionType, match_children
from .operators import (
    HierarchicalAverageFitness,
    HierarchicalGenoToPhenoOp,
    HierarchicalOp,
    HierarchicalRandomMutationOp,
    HierarchicalRecombinationOp,
    HierarchicalReductionOp,
)
from .representation import And, AndInstance, Hierarchical, HierarchicalInstance, Or, OrInstance

__all__ = [
    'Hierarchical',
    'HierarchicalInstance',
    'And',
    'AndInstance',
    'Or',
    'OrInstance',
    'HierarchicalType',
    'ReductionKind',
    'ReductionType',
    'match_children',
    'HierarchicalOp',
    'HierarchicalReductionOp',
    'HierarchicalAverageFitness',
    'HierarchicalGenoToPhenoOp',
    'HierarchicalRecombinationOp',
    'HierarchicalRandomMutationOp',
]
