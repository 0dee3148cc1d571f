"""Rain forecast proxy in front of the Open-Meteo API."""
