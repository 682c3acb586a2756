"""Dashboard aggregates across clients, properties and activity."""
