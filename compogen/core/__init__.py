"""Core abstractions: representations, operators, algorithm and loggers."""

from .algorithm import AlgorithmPass, AlgorithmStep, GeneticAlgorithm, Individual
from .logger import HistoryLogger, Logger, LogType, RunHistory, TextLogger
from .operators import FitnessOp, GenoToPhenoOp, MutationOp, Operator, RecombinationOp
from .representation import Instance, Representation

__all__ = [
    'Representation',
    'Instance',
    'Operator',
    'MutationOp',
    'RecombinationOp',
    'FitnessOp',
    'GenoToPhenoOp',
    'AlgorithmPass',
    'AlgorithmStep',
    'GeneticAlgorithm',
    'Individual',
    'Logger',
    'LogType',
    'TextLogger',
    'HistoryLogger',
    'RunHistory',
]
