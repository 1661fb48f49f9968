"""
Services module - the placement pipeline and its storage/mail wiring.

Pure pipeline steps (no I/O):
- profile_normalizer, eligibility, application_registry,
  selection_rounds, placement_finalizer, consent_gate, otp_service

Orchestration (locks + repositories):
- drive_service, consent_service, mongo_service, mailer
"""
