"""
Homewatch Sentinel

Check orchestration and alert debounce:
  - runner: failure-isolated probe execution
  - orchestrator: concurrent cycles, overall status, latest snapshot
  - alerts: per-service debounced down/recovery state machine
"""
