"""Edge proxy in front of Firebase Authentication and Firestore."""
