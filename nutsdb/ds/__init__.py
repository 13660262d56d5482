"""In-memory list, set and sorted-set data structures."""