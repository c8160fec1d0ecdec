"""GitHub Actions to Feishu notification relay.

This package receives GitHub ``workflow_job`` webhooks, verifies their
signatures, and posts completed jobs to a Feishu custom bot as
interactive cards:
- Webhook signature verification and event filtering
- Card rendering with job duration
- Optional Feishu request signing and delivery
"""
