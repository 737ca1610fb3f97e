"""Foundation utilities with no dependencies on the rest of Concord."""
