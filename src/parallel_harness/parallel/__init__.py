"""Parallel execution module for parallel-harness.

This module provides the components for running a function over an input
sequence in worker processes:

- WorkerPool: Manages the lifecycle of isolated or shared worker processes
- EnvironmentExporter: Ships named values into every isolated worker
- StaticScheduler: One precomputed chunk per worker
- DynamicScheduler: Workers claim items on demand
- SequentialScheduler: In-process baseline
- ResultAggregator: Collects results in input order
"""

from __future__ import annotations
