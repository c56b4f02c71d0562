"""Campus navigation assistant.

Architectural role:
    Root package for the BMCC campus navigation assistant. Two independent
    subsystems live underneath it and never call each other:

    - `navigation`: deterministic, rule-based route generation between campus
      buildings.
    - `conversation`: session turn log and request orchestration against a hosted
      model provider (`llm`).

    `api` contains the HTTP and CLI adapters around both.
"""

__version__ = "0.1.0"
