"""
Infrastructure layer.

- logging: LoggerManager / get_logger
- exceptions: HousingConsoleError family
- serialization: JSON helpers
- config: ConsoleConfig loading (import it explicitly; it pulls in the HTTP adapter defaults)
"""
