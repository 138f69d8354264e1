from allocator import AllocationError, calloc_allocator
from linked_list import new_list


class HashMapEntry(object):
    # One key-value binding. The owner field points back at the table holding the entry, which is the
    # only way the chain's free hook can find the disposers. Fields start out empty. Initializes in O(1)
    def __init__(self):
        self.key = None
        self.value = None
        self.owner = None


class Bucket(object):
    # One slot of the bucket vector. A bucket with nothing in it has no chain at all rather than an
    # empty one. Initializes in O(1)
    def __init__(self):
        self.chain = None


# Builds the bucket vector in one allocation. O(n) in the number of buckets.
def bucket_vector(num_buckets):
    return [Bucket() for _ in range(num_buckets)]


# Equality used when the caller supplies none: two keys match only if they are the same object. O(1)
def default_key_equality(x, y):
    return x is y


class HashTable(object):
    # Separately chained hash table with a fixed number of buckets. The hash function and the key
    # equality predicate are supplied by the caller, as are the optional key_fn and value_fn disposers,
    # which are called exactly once on a key and a value when their binding leaves the table (erased,
    # replaced, cleared, or the table freed). Keys and values are never copied.
    # Raises AllocationError if the bucket vector cannot be allocated. O(n) in the number of buckets.
    def __init__(self, num_buckets, hash_fn, key_fn=None, value_fn=None, equality_fn=None, allocator=None):
        assert num_buckets > 0
        assert hash_fn is not None
        self.allocator = allocator if allocator is not None else calloc_allocator
        self.hash_fn = hash_fn
        self.key_fn = key_fn
        self.value_fn = value_fn
        self.keys_are_equal = equality_fn if equality_fn is not None else default_key_equality
        self.num_buckets = num_buckets
        self.len = 0
        self.buckets = self.allocator.alloc(bucket_vector, num_buckets)
        if self.buckets is None:
            raise AllocationError("unable to allocate %d buckets" % num_buckets)

    # Allows len() function to take this object as an argument. O(1)
    def __len__(self):
        return self.len

    # Allows retrieval using subscript syntax. Raises KeyError when the key is not bound. O(1)
    def __getitem__(self, key):
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    # Allows adding elements using subscript syntax. Raises AllocationError if the binding could not be
    # stored, in which case any previous binding for the key is still in place. O(1)
    def __setitem__(self, key, value):
        if not self.set(key, value):
            raise AllocationError("unable to store binding for %r" % (key,))

    # Allows removal of an element using del table[key] syntax. O(1)
    def __delitem__(self, key):
        if not self.erase(key):
            raise KeyError(key)

    # Allows stored entries to be iterated in for each loop, bucket by bucket and in chain order within
    # a bucket. The table must not be changed while an iteration is in progress.
    # This method is O(1) though iteration itself is O(n).
    def __iter__(self):
        return HashTableIterator(self)

    # Allows use of the in keyword to test existence of key in hash table. O(1)
    def __contains__(self, key):
        return self.contains(key)

    # Allows for the keys stored in the hash table to be iterated. O(1)
    def key_iterator(self):
        return HashKeyIterator(self)

    # Allows for the values stored in the hash table to be iterated. O(1)
    def value_iterator(self):
        return HashValueIterator(self)

    # Calculates the index into the bucket vector for a key. O(1)
    def hash(self, key):
        return self.hash_fn(key) % self.num_buckets

    # O(1)
    def is_empty(self):
        return self.len == 0

    # O(1)
    def size(self):
        return self.len

    # O(1)
    def bucket_count(self):
        return self.num_buckets

    # O(1) if there are few hash collisions
    def contains(self, key):
        return self.find_entry(self.buckets[self.hash(key)].chain, key) is not None

    # Returns the value bound to the key, or None if there is none. The table keeps the binding. O(1)
    def get(self, key):
        entry = self.find_entry(self.buckets[self.hash(key)].chain, key)
        if entry is None:
            return None
        return entry.value

    # Binds the value to the key, replacing any binding for an equal key. The new entry is appended to
    # the chain before the old one is removed, so the disposers only ever see the superseded key and
    # value, and an allocation failure anywhere leaves the previous binding intact. Returns False if
    # the binding could not be stored. O(1)
    def set(self, key, value):
        assert value is not None
        bucket = self.buckets[self.hash(key)]
        if bucket.chain is None:
            bucket.chain = new_list(bucket_free, self.allocator)
            if bucket.chain is None:
                return False
        chain = bucket.chain
        existing = self.find_entry(chain, key)
        entry = self.allocator.alloc(HashMapEntry)
        if entry is not None:
            entry.key = key
            entry.value = value
            entry.owner = self
            if chain.append(entry):
                if existing is None:
                    self.len += 1
                else:
                    chain.remove(existing)
                return True
            entry.key = entry.value = entry.owner = None
            self.allocator.free(entry)
        # Only a chain created by this call can be empty here.
        if chain.is_empty():
            bucket.chain = None
            chain.free()
        return False

    # Removes the binding for the key and hands the key and value to the disposers. Returns False, with
    # no disposer called, if nothing is bound to the key. O(1)
    def erase(self, key):
        bucket = self.buckets[self.hash(key)]
        entry = self.find_entry(bucket.chain, key)
        if entry is None:
            return False
        self.len -= 1
        chain = bucket.chain
        if len(chain) == 1:
            bucket.chain = None
            chain.free()
            return True
        return chain.remove(entry)

    # Disposes of every binding and returns the table to the state it had right after construction.
    # O(n) where n is the number of buckets plus the number of entries.
    def clear(self):
        try:
            self.release_chains(self.buckets, True)
        finally:
            self.len = 0

    # Calls callback(entry, context) for each entry in iteration order and stops as soon as the callback
    # returns a false value. The table must not be changed from inside the callback. O(n)
    def foreach(self, callback, context=None):
        assert callback is not None
        for entry in self:
            if not callback(entry, context):
                return

    # Changes the number of buckets and moves every entry to the bucket its hash selects for the new
    # count. Entries are moved, not replaced, so no disposer is called. If any allocation fails the
    # table is left exactly as it was and False is returned. The table never resizes on its own. O(n)
    def resize(self, num_buckets):
        assert num_buckets > 0
        buckets = self.allocator.alloc(bucket_vector, num_buckets)
        if buckets is None:
            return False
        relinked = False
        try:
            for entry in self:
                bucket = buckets[self.hash_fn(entry.key) % num_buckets]
                if bucket.chain is None:
                    bucket.chain = new_list(bucket_free, self.allocator)
                if bucket.chain is None or not bucket.chain.append(entry):
                    return False
            relinked = True
        finally:
            if not relinked:
                self.release_chains(buckets, False)
                self.allocator.free(buckets)
        self.release_chains(self.buckets, False)
        self.allocator.free(self.buckets)
        self.buckets = buckets
        self.num_buckets = num_buckets
        return True

    # Disposes of every binding and releases the bucket vector. The table must not be used afterwards.
    # O(n)
    def free(self):
        try:
            self.clear()
        finally:
            self.allocator.free(self.buckets)
            self.buckets = None

    # Releases every chain in the vector, leaving each bucket without one. The chain is detached from
    # its bucket before it is released so the disposers never see it through the table. A disposer that
    # raises does not stop the other chains from being released; the first exception is raised again
    # at the end. O(n)
    def release_chains(self, buckets, release_entries):
        error = None
        for bucket in buckets:
            if bucket.chain is None:
                continue
            chain = bucket.chain
            bucket.chain = None
            try:
                chain.free(release_entries)
            except Exception as exc:
                if error is None:
                    error = exc
        if error is not None:
            raise error

    # Linear scan of a chain, which may be None, for the entry whose key is equal to the given one. O(1)
    # if there are few hash collisions
    def find_entry(self, chain, key):
        if chain is None:
            return None
        for entry in chain:
            if self.keys_are_equal(entry.key, key):
                return entry
        return None


# Free hook registered on every bucket chain. Runs after the entry has been unlinked from its chain:
# disposes the key, then the value, then releases the entry through its table's allocator. The value
# is still disposed and the entry still released if the key disposer raises. O(1) plus whatever the
# disposers cost.
def bucket_free(entry):
    assert entry is not None
    hash_table = entry.owner
    key = entry.key
    value = entry.value
    entry.key = entry.value = entry.owner = None
    try:
        if hash_table.key_fn is not None:
            hash_table.key_fn(key)
    finally:
        try:
            if hash_table.value_fn is not None:
                hash_table.value_fn(value)
        finally:
            hash_table.allocator.free(entry)


# Creates a table, or returns None instead of raising if the allocator cannot provide the bucket
# vector. O(n) in the number of buckets.
def new_hash_table(num_buckets, hash_fn, key_fn=None, value_fn=None, equality_fn=None, allocator=None):
    try:
        return HashTable(num_buckets, hash_fn, key_fn, value_fn, equality_fn, allocator)
    except AllocationError:
        return None


# Frees the table, accepting None as a no-op. O(n)
def free_hash_table(hash_table):
    if hash_table is None:
        return
    hash_table.free()


class HashTableIterator(object):
    # O(1) to initialize dedicated iterator class
    def __init__(self, hash_table):
        self.outer = 0
        self.chain_iterator = iter(())
        self.ht = hash_table

    # Conforms to iterator protocol. Runs in O(1)
    def __iter__(self):
        return self

    # The outer loop steps through the bucket vector while the inner iterator walks the chain of the
    # current bucket. Buckets without a chain are skipped. Entries are never None, so None marks the
    # end of a chain.
    def __next__(self):
        while True:
            entry = next(self.chain_iterator, None)
            if entry is not None:
                return entry
            if self.outer >= len(self.ht.buckets):
                raise StopIteration
            chain = self.ht.buckets[self.outer].chain
            self.outer += 1
            if chain is not None:
                self.chain_iterator = iter(chain)


class HashKeyIterator(object):
    # Provides an abstraction to iterate on the keys of the HashTable. O(1) to initialize.
    def __init__(self, hash_table):
        self.iterator = HashTableIterator(hash_table)

    # Conforms to iterator protocol. Runs in O(1)
    def __iter__(self):
        return self

    # Returns the key of the entry returned by HashTableIterator.__next__() in O(1)
    def __next__(self):
        return self.iterator.__next__().key


class HashValueIterator(object):
    def __init__(self, hash_table):
        self.iterator = HashTableIterator(hash_table)

    # Conforms to iterator protocol. Runs in O(1)
    def __iter__(self):
        return self

    # Returns the value of the entry returned by HashTableIterator.__next__() in O(1)
    def __next__(self):
        return self.iterator.__next__().value
