"""HTTP and WebSocket surface for the Loop Defense simulation."""
