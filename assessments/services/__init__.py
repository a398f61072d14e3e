"""
Assessment Services Package

- validation/: response shape checks
- scoring/: pure scoring of quiz and interactive responses
- attempts/: attempt state machine and time-limit enforcement
- results/: learner-facing results, completion and retry eligibility

Author: DSP Development Team
Version: 1.0.0
"""
