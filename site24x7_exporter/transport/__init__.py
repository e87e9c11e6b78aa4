"""Upload transport and OpenTelemetry SDK integration."""
