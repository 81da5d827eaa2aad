"""Local-ancestry lookup at a query interval for every individual in a track."""
