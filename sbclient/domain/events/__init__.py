"""Domain Events raised by the request pipeline and the response cache."""
