"""Generational policies and standard array operators."""

from .operators import (
    ArithmeticRecombination,
    AverageFitness,
    GenoToPhenoIdentity,
    KPointCrossover,
    OnePointMutation,
    UniformCrossover,
)
from .static import StaticAlgorithmPass, StaticAlgorithmStep, StaticGeneticAlgorithm

__all__ = [
    'StaticAlgorithmPass',
    'StaticAlgorithmStep',
    'StaticGeneticAlgorithm',
    'OnePointMutation',
    'KPointCrossover',
    'UniformCrossover',
    'ArithmeticRecombination',
    'AverageFitness',
    'GenoToPhenoIdentity',
]
