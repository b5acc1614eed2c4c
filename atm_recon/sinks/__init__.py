"""Output sinks for reconciliation results."""

from atm_recon.config import OutputConfig
from atm_recon.exceptions import ConfigurationError
from atm_recon.models import OutputFormat
from atm_recon.sinks.console import ConsoleSink
from atm_recon.sinks.csv_file import CsvFileSink
from atm_recon.sinks.json_file import JsonFileSink

Sink = ConsoleSink | CsvFileSink | JsonFileSink


def create_sink(config: OutputConfig) -> Sink:
    """Build the sink selected by the output configuration."""
    if config.format == OutputFormat.CSV:
        return CsvFileSink(config.output_dir, whole_amounts=config.whole_amounts)
    if config.format == OutputFormat.JSON:
        return JsonFileSink(config.output_dir, pretty=config.pretty_json)
    if config.format == OutputFormat.CONSOLE:
        return ConsoleSink(whole_amounts=config.whole_amounts)
    raise ConfigurationError(f"Unsupported output format {config.format!r}")


__all__ = ["ConsoleSink", "CsvFileSink", "JsonFileSink", "Sink", "create_sink"]
