"""Outbound notifications -- the email queue, document requests and suggested meetings."""
