from allocator import calloc_allocator


class ListNode(object):
    # A single link of the list. Fields start out empty so that any zeroing allocator can produce one.
    # Initializes in O(1)
    def __init__(self):
        self.data = None
        self.prev = None
        self.next = None


class LinkedList(object):
    # Doubly linked list of opaque elements. The list never copies its elements; it owns the nodes and
    # hands each element to free_callback when the element leaves the list. Nodes are allocated and
    # released through the allocator the list was created with. Initializes in O(1)
    def __init__(self, free_callback=None, allocator=calloc_allocator):
        assert allocator is not None
        self.head = None
        self.tail = None
        self.length = 0
        self.free_callback = free_callback
        self.allocator = allocator

    # Allows len() function to take this object as an argument. O(1)
    def __len__(self):
        return self.length

    # Allows the elements to be iterated front to back in a for each loop. O(1) to create the iterator.
    def __iter__(self):
        return LinkedListIterator(self)

    # O(1)
    def is_empty(self):
        return self.length == 0

    # Returns the first element. The list must not be empty. O(1)
    def front(self):
        assert self.head is not None
        return self.head.data

    # Returns the last element. The list must not be empty. O(1)
    def back(self):
        assert self.tail is not None
        return self.tail.data

    # Adds an element at the tail. Returns False and leaves the list unchanged if no node could be
    # allocated. O(1)
    def append(self, data):
        assert data is not None
        node = self.allocator.alloc(ListNode)
        if node is None:
            return False
        node.data = data
        node.prev = self.tail
        if self.tail is None:
            self.head = node
        else:
            self.tail.next = node
        self.tail = node
        self.length += 1
        return True

    # Adds an element at the head, same contract as append. O(1)
    def prepend(self, data):
        assert data is not None
        node = self.allocator.alloc(ListNode)
        if node is None:
            return False
        node.data = data
        node.next = self.head
        if self.head is None:
            self.tail = node
        else:
            self.head.prev = node
        self.head = node
        self.length += 1
        return True

    # Removes the first node holding this exact element (identity, not equality) and passes the element
    # to the free callback. Returns False if the element is not in the list. O(n)
    def remove(self, data):
        assert data is not None
        node = self.head
        while node is not None:
            if node.data is data:
                self.unlink(node)
                self.release_node(node, True)
                return True
            node = node.next
        return False

    # Removes every element front to back, calling the free callback on each one. O(n)
    def clear(self):
        self.release_all(True)

    # Empties the list and releases the list itself. With release_elements set to False the nodes are
    # dropped without the free callback ever seeing their elements, which lets a caller move elements
    # into another list. The list must not be used afterwards. O(n)
    def free(self, release_elements=True):
        try:
            self.release_all(release_elements)
        finally:
            self.allocator.free(self)

    # Detaches the node from its neighbours and fixes up head and tail. O(1)
    def unlink(self, node):
        if node.prev is None:
            self.head = node.next
        else:
            node.prev.next = node.next
        if node.next is None:
            self.tail = node.prev
        else:
            node.next.prev = node.prev
        self.length -= 1

    # The node is detached before the callback runs, so the callback never sees a half-updated list. O(1)
    def release_node(self, node, release_element):
        data = node.data
        node.data = node.prev = node.next = None
        self.allocator.free(node)
        if release_element and self.free_callback is not None:
            self.free_callback(data)

    # A free callback that raises does not stop the remaining elements from being released; the first
    # exception is raised again once every node is gone. O(n)
    def release_all(self, release_elements):
        node = self.head
        self.head = self.tail = None
        self.length = 0
        error = None
        while node is not None:
            next_node = node.next
            try:
                self.release_node(node, release_elements)
            except Exception as exc:
                if error is None:
                    error = exc
            node = next_node
        if error is not None:
            raise error


class LinkedListIterator(object):
    # Walks the nodes from head to tail. O(1) to initialize.
    def __init__(self, linked_list):
        self.node = linked_list.head

    # Conforms to iterator protocol. Runs in O(1)
    def __iter__(self):
        return self

    # Runs in O(1)
    def __next__(self):
        if self.node is None:
            raise StopIteration
        data = self.node.data
        self.node = self.node.next
        return data


# Creates a list through the given allocator, or returns None if the allocator refuses. O(1)
def new_list(free_callback=None, allocator=calloc_allocator):
    assert allocator is not None
    return allocator.alloc(LinkedList, free_callback, allocator)
