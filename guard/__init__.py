"""
Guard: SecureGuard control service

Single source of truth for the simulated machine security state.
Responsibilities:
- Remote access toggles (RDP / SSH / VNC)
- Firewall profile toggles and block rules
- Managed remote service control (start/stop/enable/disable, bulk)
- Append-only activity log
- Aggregate security status and score
"""
