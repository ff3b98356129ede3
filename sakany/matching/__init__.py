"""
Lifestyle matching.

Responsibilities:
- Validate lifestyle quiz answers into typed preference models.
- Score answers into family, luxury, investment and location accumulators.
- Classify the dominant location archetype and derive the top priorities.
- Apply the strict filter of the short quiz to a property collection.
"""
